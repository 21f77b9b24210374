"""grantsync 核心层(Shared Kernel): 常量、类型与异常."""
