"""
The CROP layer turns a decoded scan into the subset of primitives inside the
crop region. It only consumes and produces GeometryBuffers.
"""
