# Task board: three-column kanban state, drag-and-drop transfer, persistence
#
# Components:
#   schema.py      - Data model (Task, Column, Priority, BoardState, seed data)
#   storage.py     - Key-value stores (in-memory, SQLite)
#   persistence.py - Board load/save over a key-value store
#   columns.py     - Column store with change notifications
#   form.py        - Add/edit form controller
#   drag.py        - Drag-transfer protocol
#   board.py       - Session wiring
#   config.py      - YAML configuration
