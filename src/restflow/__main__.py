from restflow.cli import main

main()
