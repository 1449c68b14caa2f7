"""
Page routes that do not belong to a component
"""
