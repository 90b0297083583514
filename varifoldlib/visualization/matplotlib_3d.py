"""3D visualization of face fields with matplotlib."""

import numpy as np


def plot_face_scalar_field(
    mesh,
    values,
    ax=None,
    cmap: str = 'coolwarm',
    vmin: float = None,
    vmax: float = None,
    colorbar: bool = True,
    label: str = None,
    title: str = None,
):
    """Draw the mesh faces coloured by a per-face scalar field.

    Parameters
    ----------
    mesh : SurfaceMesh
        Surface to draw.
    values : array_like, shape (n_faces,)
        Scalar per face. NaN faces are drawn with the colormap's "bad" colour.
    ax : mpl_toolkits.mplot3d.Axes3D or None
        If None, a new 3D figure is created.
    cmap : str
        Colormap name.
    vmin, vmax : float or None
        Colour range; defaults to a range symmetric about zero.
    colorbar : bool
        Whether to add a colorbar.
    label : str or None
        Colorbar label.
    title : str or None
        Plot title.

    Returns
    -------
    fig, ax
    """
    import matplotlib.pyplot as plt
    from matplotlib import colormaps
    from matplotlib.colors import Normalize
    from mpl_toolkits.mplot3d.art3d import Poly3DCollection

    values = np.asarray(values, dtype=np.float64)
    if len(values) != mesh.n_faces:
        raise ValueError(f"{len(values)} values for {mesh.n_faces} faces")

    if ax is None:
        fig = plt.figure()
        ax = fig.add_subplot(111, projection='3d')
    else:
        fig = ax.get_figure()

    finite = values[np.isfinite(values)]
    bound = float(np.max(np.abs(finite))) if finite.size else 1.0
    if vmin is None:
        vmin = -bound
    if vmax is None:
        vmax = bound
    norm = Normalize(vmin=vmin, vmax=vmax)
    colors = colormaps[cmap](norm(np.ma.masked_invalid(values)))

    polys = [mesh.positions[list(face)] for face in mesh.faces]
    ax.add_collection3d(Poly3DCollection(polys, facecolors=colors,
                                         edgecolors='none'))
    lo = mesh.positions.min(axis=0)
    hi = mesh.positions.max(axis=0)
    ax.set_xlim(lo[0], hi[0])
    ax.set_ylim(lo[1], hi[1])
    ax.set_zlim(lo[2], hi[2])
    if colorbar:
        sm = plt.cm.ScalarMappable(norm=norm, cmap=cmap)
        sm.set_array(values)
        fig.colorbar(sm, ax=ax, label=label, shrink=0.6)
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_zlabel('z')
    if title:
        ax.set_title(title)

    return fig, ax
