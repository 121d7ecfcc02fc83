from drun.cli import main

main()
