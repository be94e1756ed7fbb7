from drainbench.cli import main

main()
