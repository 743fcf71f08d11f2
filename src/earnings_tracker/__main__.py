from earnings_tracker.cli import main

main()
