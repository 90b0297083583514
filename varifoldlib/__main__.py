"""
Command line evaluation of varifold curvature on analytic test shapes.

    python -m varifoldlib --shape torus --radius 0.5 --kernel hs --method tnfc
    python -m varifoldlib --shape sphere --method cnfc --output fields.json
    python -m varifoldlib --shape sphere --test kernel --show

For 'cnfc' the exact normals of the shape stand in for an external normal
estimator.
"""

import argparse
import logging
import sys

from varifoldlib import shapes
from varifoldlib._config import DistributionType, Method, VarifoldConfig
from varifoldlib._errors import ConfigurationError, UnimplementedMethodError, UpstreamDataError
from varifoldlib.evaluate import evaluate_shape, kernel_weights_field
from varifoldlib.operators.neighborhood import neighborhood_backends
from varifoldlib.visualization._sink import FieldSink

logger = logging.getLogger("varifoldlib")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="varifoldlib",
        description="Computation of mean curvature on an analytic shape with "
                    "kernel-weighted varifold curvature vectors, compared "
                    "with the exact curvature.",
    )
    parser.add_argument("--shape", choices=["sphere", "torus", "plane"],
                        default="torus", help="test surface (default: torus)")
    parser.add_argument("--shape-radius", type=float, default=1.0,
                        help="sphere radius")
    parser.add_argument("--subdivisions", type=int, default=3,
                        help="icosphere subdivision level")
    parser.add_argument("--major", type=float, default=3.0,
                        help="torus major radius")
    parser.add_argument("--minor", type=float, default=1.0,
                        help="torus minor radius")
    parser.add_argument("--resolution", type=int, default=40,
                        help="quads per direction (torus, plane)")
    parser.add_argument("--size", type=float, default=2.0,
                        help="plane side length")
    parser.add_argument("-R", "--radius", type=float, default=0.5,
                        help="radius of the kernel ball")
    parser.add_argument("--kernel", default="hs",
                        help="kernel: " + ", ".join(
                            f"'{d.value}' {d.name.lower()}" for d in DistributionType))
    parser.add_argument("--method", default="tnfc",
                        help="method: " + ", ".join(
                            f"'{m.value}' {m.name.lower()}" for m in Method))
    parser.add_argument("--neighborhood", default="brute-force",
                        choices=neighborhood_backends.available(),
                        help="neighbourhood query backend")
    parser.add_argument("--workers", type=int, default=None,
                        help="threads for the per-element loop")
    parser.add_argument("--test", choices=["kernel"], default=None,
                        help="'kernel': publish the kernel weights around element 0")
    parser.add_argument("--output", default=None,
                        help="write fields to this JSON file")
    parser.add_argument("--show", action="store_true",
                        help="display the fields with polyscope")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="debug logging")
    return parser


def make_shape(args):
    """Mesh, exact mean curvature function and exact normal function."""
    if args.shape == "sphere":
        mesh = shapes.make_sphere(args.shape_radius, args.subdivisions)
        return (mesh,
                lambda p: shapes.sphere_curvatures(p, args.shape_radius)[0],
                shapes.sphere_normals)
    elif args.shape == "torus":
        mesh = shapes.make_torus(args.major, args.minor,
                                 args.resolution, args.resolution)
        return (mesh,
                lambda p: shapes.torus_curvatures(p, args.major, args.minor)[0],
                lambda p: shapes.torus_normals(p, args.major))
    mesh = shapes.make_plane(args.size, args.resolution)
    return mesh, lambda p: shapes.plane_curvatures(p)[0], shapes.plane_normals


def _sinks(args, mesh):
    sinks = []
    if args.output:
        from varifoldlib.data import JsonFieldSink
        sinks.append(JsonFieldSink(mesh, args.output))
    if args.show:
        from varifoldlib.visualization.polyscope_3d import PolyscopeFieldSink
        sinks.append(PolyscopeFieldSink(mesh, name="studied mesh"))
    return sinks


class _Tee(FieldSink):
    """Forwards every field to several sinks."""

    def __init__(self, sinks):
        self.sinks = sinks

    def add_scalar_field(self, name, values, on="faces"):
        for s in self.sinks:
            s.add_scalar_field(name, values, on=on)

    def add_vector_field(self, name, values, on="faces"):
        for s in self.sinks:
            s.add_vector_field(name, values, on=on)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s:%(name)s: %(message)s")

    try:
        config = VarifoldConfig(radius=args.radius, distribution=args.kernel,
                                method=args.method, neighborhood=args.neighborhood,
                                workers=args.workers)
        mesh, exact_mean, exact_normals = make_shape(args)
        logger.info(f"{mesh}")
        sinks = _sinks(args, mesh)
        tee = _Tee(sinks)

        if args.test == "kernel":
            kernel_weights_field(mesh, config, 0, sink=tee)
        else:
            element = config.method.element
            positions = mesh.element_positions(element)
            corrected = None
            if config.method is Method.CORRECTED_NORMAL_FACE_CENTROID:
                corrected = exact_normals(mesh.face_centroids())
            evaluate_shape(mesh, config, expected_mean=exact_mean(positions),
                           corrected_normals=corrected, sink=tee)
    except (ConfigurationError, UnimplementedMethodError, UpstreamDataError) as e:
        logger.error(str(e))
        return 1

    for s in sinks:
        if hasattr(s, "write"):
            logger.info(f"Fields written to {s.write()}")
        if hasattr(s, "show"):
            s.show()
    return 0


if __name__ == "__main__":
    sys.exit(main())
