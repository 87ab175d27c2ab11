from aiskel.cli import main

main()
