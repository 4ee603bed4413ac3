import sys

import tabulate

FLOAT_FORMAT = ".4g"


def table_formats() -> list[str]:
    return tabulate.tabulate_formats


class ReportPrinter:
    """Prints titled two-column sections for the command line modules.

    A section is built from any mix of ``[label, value]`` rows and objects
    exposing ``as_rows()`` (``RunStats``, ``Accuracy``, ``KmerSpectrum``).
    """

    def __init__(self, fmt: str, file=None) -> None:
        self.__fmt = fmt
        self.__file = file

    def render(self, *sources) -> str:
        rows = []
        for source in sources:
            if hasattr(source, "as_rows"):
                rows.extend(source.as_rows())
            else:
                rows.append(source)
        return tabulate.tabulate(
            rows, tablefmt=self.__fmt, floatfmt=FLOAT_FORMAT, intfmt=","
        )

    def section(self, title: str, *sources) -> None:
        out = self.__file or sys.stdout
        print(f"{title}:", file=out)
        print(self.render(*sources), file=out)
        print(file=out)
