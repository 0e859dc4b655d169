"""Game domain services: state store, buzzer arbitration, card selection.

Everything that mutates the game state, the buzz queue or the catalog runs
through ``store.game_operation`` so compound updates serialize, commit
atomically and fan out to subscribers afterwards. Routes and socket
handlers import from here and stay free of game rules.
"""
