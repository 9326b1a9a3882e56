"""Engine core: time math, scheduling, lifecycle and shared services"""
