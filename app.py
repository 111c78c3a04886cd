"""
GitHub pull request → Slack notifier

Entry point for running from a checkout (``python app.py``); same as
``python -m pr_notify`` or the ``pr-slack-notify`` script.
"""

from pr_notify.app import main

if __name__ == "__main__":
    main()
