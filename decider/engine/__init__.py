"""Decision lifecycle engine.

Pure rules (validator, tally, comment tree) have no database access. The
service modules load state through ``db.session`` and apply each operation
inside a single ``unit_of_work``.
"""
