from merge_chain import main

main()
