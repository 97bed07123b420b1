from seedmap.main import main

main()
