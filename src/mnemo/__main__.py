from mnemo.interface.cli import main

main()
