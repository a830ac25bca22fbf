from jargo.cli import main

main()
