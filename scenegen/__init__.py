"""
SceneGen
Compose an uploaded reference image into a generated scene.
"""
