"""Domain layer for catalogit application.

Services are imported from their modules, e.g.
``from catalogit.domain.item import ItemService``.
"""
