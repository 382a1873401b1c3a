"""
The CONTROLLER layer decides which models exist in which dimensions and
builds them on request.
"""
