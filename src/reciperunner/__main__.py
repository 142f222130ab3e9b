from reciperunner.cli import main

main()
