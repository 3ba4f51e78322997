from __future__ import annotations

from linfa.kernel.kernel import Kernel, KernelMatrix

__all__ = ["Kernel", "KernelMatrix"]
