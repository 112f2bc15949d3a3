import numpy as np

def vec(list):
    """Handy shorthand to make a double-precision float array."""
    return np.array(list, dtype=np.float64)

def normalize(v):
    """Return a unit vector in the direction of the vector v.

    Raises ValueError for a zero-length vector.
    """
    length = np.linalg.norm(v)
    if length < 1e-12:
        raise ValueError(f"cannot normalize zero-length vector {v}")
    return v / length

def reflect(d, n):
    """Mirror the direction d about the unit normal n."""
    return d - 2.0 * np.dot(d, n) * n

def refract(d, n, eta):
    """Bend the unit direction d through a surface with unit normal n.

    Parameters:
      d : (3,) -- incoming direction
      n : (3,) -- surface normal, facing against d
      eta : float -- ratio of refractive indices, incident over transmitted
    Return:
      (3,) -- the transmitted direction, or None on total internal reflection
    """
    cos_i = -np.dot(d, n)
    k = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    if k < 0:
        return None
    return normalize(eta * d + (eta * cos_i - np.sqrt(k)) * n)


def to_srgb(img):
    img_clip = np.clip(img, 0, 1)
    return np.where(img_clip > 0.0031308, (1.055 * img_clip**(1/2.4) - 0.055), 12.92 * img_clip)

def to_srgb8(img):
    return np.clip(np.round(255.0 * to_srgb(img)), 0, 255).astype(np.uint8)

def to_linear8(img):
    """Quantize a linear [0,1] image to 8 bits without gamma encoding."""
    return np.clip(np.round(255.0 * np.asarray(img)), 0, 255).astype(np.uint8)


def _obj_index(s, count, what):
    """Turn a 1-based or negative (relative) OBJ index into a 0-based one."""
    i = int(s)
    i = count + i if i < 0 else i - 1
    if not 0 <= i < count:
        raise ValueError(f"{what} index {s} out of range, {count} defined so far")
    return i


def read_obj(f):
    """Read a file in the Wavefront OBJ file format.

    Argument is an open file.
    Returns a tuple of NumPy arrays: (indices, positions, normals, uvs).
    Faces with more than three vertices are split into triangle fans.
    Raises ValueError for malformed numbers and out-of-range indices.
    """

    # position, normal, uv, and face data in the order they appear in the file
    f_posns = []
    f_normals = []
    f_uvs = []
    f_faces = []

    # set of unique (position, uv, normal) index combinations, -1 where absent
    verts = set()

    for words in (line.split() for line in f.readlines()):
        if not words or words[0].startswith('#'):
            continue
        if words[0] == 'v':
            f_posns.append([float(s) for s in words[1:4]])
        elif words[0] == 'vn':
            f_normals.append([float(s) for s in words[1:4]])
        elif words[0] == 'vt':
            f_uvs.append([float(s) for s in words[1:3]])
        elif words[0] == 'f':
            face = []
            for w in words[1:]:
                w = w.split('/')
                key = (
                    _obj_index(w[0], len(f_posns), 'vertex'),
                    _obj_index(w[1], len(f_uvs), 'uv') if len(w) > 1 and w[1] else -1,
                    _obj_index(w[2], len(f_normals), 'normal') if len(w) > 2 and w[2] else -1,
                )
                face.append(key)
                verts.add(key)
            f_faces.append(face)

    # there is one vertex for each unique index combo; number them
    vertmap = dict((s,i) for (i,s) in enumerate(sorted(verts)))

    # collate the vertex data for each vertex
    posns = [None] * len(vertmap)
    normals = [None] * len(vertmap)
    uvs = [None] * len(vertmap)
    for (p, t, n), v in vertmap.items():
        posns[v] = f_posns[p]
        if t >= 0:
            uvs[v] = f_uvs[t]
        if n >= 0:
            normals[v] = f_normals[n]

    # set up faces using our ordering; polygons become triangle fans
    inds = []
    for keys in f_faces:
        face = [vertmap[k] for k in keys]
        for k in range(1, len(face) - 1):
            inds.append([face[0], face[k], face[k + 1]])

    # vertices without a normal or uv are dropped from those arrays
    return (
        np.array(inds, dtype=np.int32),
        np.array(posns, dtype=np.float64),
        np.array([n for n in normals if n is not None], dtype=np.float64),
        np.array([t for t in uvs if t is not None], dtype=np.float64)
        )


def read_obj_triangles(f):
    """Read a file in the Wavefront OBJ file format and convert to separate triangles.

    Argument is an open file.
    Returns an array of shape (n, 3, 3) that has the 3D vertex positions of n triangles.
    """

    (i, p, n, t) = read_obj(f)
    if len(i) == 0:
        return np.zeros((0, 3, 3), dtype=np.float64)
    return p[i,:]
