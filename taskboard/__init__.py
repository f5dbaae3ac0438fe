# Task board engine: column view, sync, drag moves, deadline alerts, note autosave
#
# Components:
#   schema.py        - Data model (Task, Priority, TaskStatus, Column, Note, NotificationEvent)
#   errors.py        - Error taxonomy shared by client and engine
#   collection.py    - Ordered, owner-scoped task collection
#   events.py        - Subscribe/emit fan-out
#   categorizer.py   - Progress-threshold column partition and the board view
#   drag.py          - Drag reassignment state machine
#   notifications.py - Deadline notification scheduler
#   notes.py         - Debounced note autosave
#   client.py        - HTTP clients for the task and note stores
#   sync.py          - Task sync facade (load/create/patch/remove)
#   board.py         - Wires the pieces together per owner
#   config.py        - YAML config + logging setup
#   store.py         - SQLite persistence used by board_server.py

__version__ = "0.3.0"
