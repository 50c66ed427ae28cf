"""
服务组件
"""
