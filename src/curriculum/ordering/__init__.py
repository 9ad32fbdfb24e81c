from curriculum.ordering.reindexer import changed_orders, compact, reorder

__all__ = ["reorder", "compact", "changed_orders"]
