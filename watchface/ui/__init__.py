"""Assets, frame composition, rasterization and the desktop window"""
