from surveyport.cli import main

main()
