"""
The VIEW layer turns face sequences into pictures.
"""
