from shopping_list_engine.cli import cli

cli()
