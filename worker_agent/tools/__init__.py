"""工具系统：数据结构、Worker 工具目录与分发执行器。"""
