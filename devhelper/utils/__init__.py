"""Calendar/clock policy and logging helpers"""
