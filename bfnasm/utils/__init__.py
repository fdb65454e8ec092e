"""Support modules: errors, terminal output and the external toolchain"""
