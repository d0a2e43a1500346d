"""
外部服务模块
"""
