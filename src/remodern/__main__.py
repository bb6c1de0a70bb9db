from remodern.cli import main

main()
