"""
scripts

Scripts exécutables (CLI) du projet : données de démonstration, tâches ponctuelles.
Ils orchestrent le code de `objectifs` sans porter de logique métier propre.
"""
