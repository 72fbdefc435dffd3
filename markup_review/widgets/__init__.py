"""UI Widgets for Markup Review"""
