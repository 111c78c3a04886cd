from pr_notify.app import main

main()
