from checkdupes.cli import main

main()
