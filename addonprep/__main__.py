from addonprep.cli import main

main()
