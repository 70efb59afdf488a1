from svelte_adder.cli import main

main()
