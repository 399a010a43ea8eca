"""Application services: change diffing, report workflow, e-sign, audit reporting.

Import from the submodules directly; the persistence layer imports
change_differ, so this package must not import repositories eagerly.
"""
