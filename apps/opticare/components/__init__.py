"""
Feature components: one blueprint and one service per page group
"""
