import numpy as np


def format_bp(x):
    units = ["", "K", "M", "G", "T", "P"]
    if x < 1:
        return "0.0 bp"
    magnitude = min(int(np.log10(x)) // 3, len(units) - 1)
    return f"{x / 1000 ** magnitude:.1f} {units[magnitude]}bp"


def format_optional(x, offset=0):
    return "N/A" if x is None else int(x) + offset
