from curriculum.sweep.overdue import OverdueSweep

__all__ = ["OverdueSweep"]
