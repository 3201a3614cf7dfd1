from tronserver.main import main

main()
