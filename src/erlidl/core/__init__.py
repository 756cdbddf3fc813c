"""
erlidl core: IR, alias resolution, document loading and configuration.
"""
