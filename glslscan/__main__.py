from glslscan.cli import main

main()
