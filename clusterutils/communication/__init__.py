"""Communication package: wire codec, message passing, and worker pools"""
