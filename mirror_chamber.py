from ExampleSceneDef import MirrorChamberExample
from cli import render

# Two facing mirrors: the depth option decides how many reflections show up.
render(MirrorChamberExample().scene)
