from bfcount.cli import main

main()
