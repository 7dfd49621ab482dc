"""
The MODEL layer contains pure data structures and geometric helpers.
It has NO knowledge of rendering, cameras or asset loading.
It deals with vectors, geometry buffers and angles.
"""
