from utils import vec
from materials import Material
from geometry import Sphere
from ray import Camera
from scene import Scene, PointLight, AreaLight
from cli import render

tan  = Material(k_d=vec([0.7, 0.6, 0.3]))
blue = Material(k_d=vec([0.3, 0.3, 0.8]), k_m=0.2)
gray = Material(k_d=vec([0.35, 0.35, 0.35]), k_m=0.3)

glass = Material(
    # tiny diffuse
    k_d=vec([0.03, 0.03, 0.03]),
    k_s=0.9,
    p=200,
    # small mirror component
    k_m=0.1,
    k_t=0.85,
    ior=1.33
)

lights = [
    PointLight(vec([12, 10, 5]), vec([300, 300, 300])),
    # soft fill from above
    AreaLight(vec([-1, 4, 1]), vec([2, 0, 0]), vec([0, 0, 2]), vec([20, 20, 20]), samples=3),
]

camera = Camera(vec([3,1.2,5]), target=vec([0,-0.4,0]), vfov=24)

scene = Scene([
    Sphere(vec([-0.7,0,0]), 0.5, tan),
    Sphere(vec([0.7,0,0]), 0.5, blue),
    Sphere(vec([0,0,0.8]), 0.35, glass),
    Sphere(vec([0,-40,0]), 39.5, gray),
], lights, camera=camera)

render(scene)
