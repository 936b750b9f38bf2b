"""
connect4ai.interfaces - Terminal front end for Connect Four
"""
