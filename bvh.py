import numpy as np
from geometry import no_hit, AABB

class BVHNode:
    def __init__(self, bbox, left=None, right=None, objects=None):
        """Create a BVH node."""
        self.bbox = bbox
        self.left = left
        self.right = right
        self.objects = objects

    def intersect(self, ray):
        """Intersect the ray with the BVH tree, returning the closest hit."""
        if not self.bbox.intersect(ray):
            return no_hit

        if self.objects is not None:
            closest_hit = no_hit
            for obj in self.objects:
                hit = obj.intersect(ray)
                if hit.t < closest_hit.t:
                    closest_hit = hit
            return closest_hit

        hit_left = self.left.intersect(ray)
        hit_right = self.right.intersect(ray)

        if hit_left.t <= hit_right.t:
            return hit_left
        else:
            return hit_right

def build_bvh(objects, leaf_size=2):
    """Recursively build the BVH tree over objects that all have a bounding box."""
    objects = list(objects)
    if len(objects) == 0:
        raise ValueError("cannot build a BVH over no objects")

    total_bbox = AABB()
    centers = []
    for obj in objects:
        bbox = obj.get_bbox()
        total_bbox.grow_box(bbox)
        centers.append(bbox.get_center())

    # Base case
    if len(objects) <= leaf_size:
        return BVHNode(bbox=total_bbox, objects=objects)

    extents = total_bbox.max - total_bbox.min
    split_axis = np.argmax(extents)

    # stable sort keeps equal centers in scene order
    order = sorted(range(len(objects)), key=lambda k: centers[k][split_axis])
    objects = [objects[k] for k in order]

    mid = len(objects) // 2
    left_child = build_bvh(objects[:mid], leaf_size)
    right_child = build_bvh(objects[mid:], leaf_size)

    return BVHNode(bbox=total_bbox, left=left_child, right=right_child)
