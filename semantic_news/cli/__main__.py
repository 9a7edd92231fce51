# Enables `python -m semantic_news.cli`; delegates to app.main().

from semantic_news.cli.app import main

main()
