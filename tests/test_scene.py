"""Unit tests for scene composition, compilation and presets.

Tests cover:
- Scene.sdf as the minimum over members
- Color of the nearest object and tie-breaking
- Empty-scene and NaN failures
- Post-order node tables for the Taichi backend
- Scene presets
"""

import math

import numpy as np
import pytest

from src.raymarcher.geometry.sdf import SceneObject


def _two_sphere_scene():
    from src.raymarcher.geometry.sdf import Sphere
    from src.raymarcher.scene.scene import Scene

    scene = Scene()
    left = scene.add(Sphere(center=(-3.0, 0.0, -5.0), color=(255, 0, 0)))
    right = scene.add(Sphere(center=(3.0, 0.0, -5.0), color=(0, 0, 255), radius=1.0))
    return scene, left, right


class _NaNObject(SceneObject):
    """Scene object stand-in whose distance is always NaN."""

    def sdf(self, point):
        return math.nan

    def get_color(self):
        return (1, 2, 3)


class TestSceneComposition:
    """Tests for nearest-surface union."""

    @pytest.mark.parametrize(
        "point",
        [
            (-3.0, 0.0, -5.0),  # inside left
            (3.0, 0.0, -5.0),  # inside right
            (-4.0, 1.0, 0.0),  # nearer left
            (4.0, -1.0, -2.0),  # nearer right
            (0.0, 0.0, 0.0),  # between
        ],
    )
    def test_sdf_is_minimum_over_objects(self, point):
        """Test that the scene distance is the smallest member distance."""
        scene, left, right = _two_sphere_scene()
        assert scene.sdf(point) == min(left.sdf(point), right.sdf(point))

    def test_each_object_can_be_nearest(self):
        """Test that the winning color follows the nearest object."""
        scene, _, _ = _two_sphere_scene()

        _, color = scene.sdf_with_color((-3.0, 0.0, -1.0))
        assert color == (255, 0, 0)

        _, color = scene.sdf_with_color((3.0, 0.0, -1.0))
        assert color == (0, 0, 255)

    def test_tie_goes_to_first_object(self):
        """Test that exact ties keep insertion order."""
        from src.raymarcher.geometry.sdf import Sphere
        from src.raymarcher.scene.scene import Scene

        scene = Scene()
        scene.add(Sphere(center=(-1.0, 0.0, 0.0), color=(1, 1, 1)))
        scene.add(Sphere(center=(1.0, 0.0, 0.0), color=(2, 2, 2)))

        distance, color = scene.sdf_with_color((0.0, 5.0, 0.0))
        assert color == (1, 1, 1)
        assert distance == pytest.approx(math.sqrt(26.0) - 2.0)

    def test_empty_scene_raises(self):
        """Test that querying an empty scene fails fast."""
        from src.raymarcher.scene.scene import Scene

        scene = Scene()
        with pytest.raises(ValueError, match="empty"):
            scene.sdf((0.0, 0.0, 0.0))
        with pytest.raises(ValueError, match="empty"):
            scene.sdf_with_color((0.0, 0.0, 0.0))

    def test_nan_distance_raises(self):
        """Test that NaN distances are treated as fatal."""
        from src.raymarcher.scene.scene import Scene

        scene = Scene(objects=[_NaNObject()])
        with pytest.raises(ValueError, match="NaN"):
            scene.sdf((0.0, 0.0, 0.0))

    def test_objects_are_queried_through_evaluate(self):
        """Test that distance and color come from one evaluate call."""
        from src.raymarcher.scene.scene import Scene

        class _Tagged(SceneObject):
            def __init__(self):
                self.evaluated = []

            def sdf(self, point):
                return 1.0

            def get_color(self):
                return (9, 9, 9)

            def evaluate(self, point):
                self.evaluated.append(point)
                return 0.5, (7, 8, 9)

        obj = _Tagged()
        scene = Scene(objects=[obj])

        assert scene.sdf_with_color((0.0, 0.0, 0.0)) == (0.5, (7, 8, 9))
        assert len(obj.evaluated) == 1

    def test_len_and_background(self):
        """Test scene size and default background."""
        scene, _, _ = _two_sphere_scene()
        assert len(scene) == 2
        assert scene.background_color == (0, 0, 0)


class TestCompileScene:
    """Tests for flattening scenes into node tables."""

    def test_single_sphere(self):
        """Test a one-node table."""
        from src.raymarcher.geometry.sdf import Sphere
        from src.raymarcher.scene.compiled import NO_CHILD, NodeKind, compile_scene
        from src.raymarcher.scene.scene import Scene

        scene = Scene(objects=[Sphere(center=(0.0, 1.0, -5.0), color=(200, 0, 0), radius=1.5)])
        table = compile_scene(scene)

        assert table.num_nodes == 1
        assert table.num_roots == 1
        assert table.kind[0] == NodeKind.SPHERE
        assert np.array_equal(table.center[0], [0.0, 1.0, -5.0])
        assert table.radius[0] == 1.5
        assert np.array_equal(table.color[0], [200.0, 0.0, 0.0])
        assert table.child_a[0] == NO_CHILD
        assert table.is_root[0] == 1

    def test_exclusion_is_post_order(self):
        """Test that operands precede their exclusion node."""
        from src.raymarcher.geometry.sdf import ExclusionObject, Sierpinski, Sphere
        from src.raymarcher.scene.compiled import NodeKind, compile_scene
        from src.raymarcher.scene.scene import Scene

        a = Sphere(center=(0.0, 0.0, -5.0), color=(1, 0, 0))
        b = Sphere(center=(0.0, 1.5, -4.0), color=(0, 1, 0))
        scene = Scene(objects=[ExclusionObject(a=a, b=b), Sierpinski(color=(0, 0, 9))])
        table = compile_scene(scene)

        assert table.num_nodes == 4
        assert table.num_roots == 2
        assert list(table.kind) == [
            NodeKind.SPHERE,
            NodeKind.SPHERE,
            NodeKind.EXCLUSION,
            NodeKind.SIERPINSKI,
        ]
        assert table.child_a[2] == 0
        assert table.child_b[2] == 1
        assert list(table.is_root) == [0, 0, 1, 1]
        assert np.array_equal(table.color[2], [100.0, 100.0, 100.0])

    def test_nested_exclusion_indices(self):
        """Test child indices for nested exclusions."""
        from src.raymarcher.geometry.sdf import ExclusionObject, Sphere
        from src.raymarcher.scene.compiled import compile_scene
        from src.raymarcher.scene.scene import Scene

        s = [Sphere(center=(float(i), 0.0, 0.0), color=(0, 0, 0)) for i in range(3)]
        nested = ExclusionObject(a=ExclusionObject(a=s[0], b=s[1]), b=s[2])
        table = compile_scene(Scene(objects=[nested]))

        # s0, s1, inner, s2, outer
        assert table.num_nodes == 5
        assert (table.child_a[2], table.child_b[2]) == (0, 1)
        assert (table.child_a[4], table.child_b[4]) == (2, 3)
        assert list(table.is_root) == [0, 0, 0, 0, 1]

    def test_empty_scene_raises(self):
        """Test that empty scenes cannot be compiled."""
        from src.raymarcher.scene.compiled import compile_scene
        from src.raymarcher.scene.scene import Scene

        with pytest.raises(ValueError):
            compile_scene(Scene())

    @pytest.mark.parametrize(
        "center, radius",
        [((math.nan, 0.0, 0.0), 2.0), ((0.0, math.inf, 0.0), 2.0), ((0.0, 0.0, 0.0), math.inf)],
    )
    def test_non_finite_geometry_raises(self, center, radius):
        """Test that NaN or infinite spheres are rejected before upload."""
        from src.raymarcher.geometry.sdf import ExclusionObject, Sphere
        from src.raymarcher.scene.compiled import compile_scene
        from src.raymarcher.scene.scene import Scene

        bad = Sphere(center=center, color=(0, 0, 0), radius=radius)
        good = Sphere(center=(0.0, 0.0, -5.0), color=(0, 0, 0))

        with pytest.raises(ValueError, match="finite"):
            compile_scene(Scene(objects=[bad]))
        with pytest.raises(ValueError, match="finite"):
            compile_scene(Scene(objects=[ExclusionObject(a=good, b=bad)]))

    def test_unknown_object_raises(self):
        """Test that objects without a kernel implementation are rejected."""
        from src.raymarcher.scene.compiled import compile_scene
        from src.raymarcher.scene.scene import Scene

        with pytest.raises(TypeError, match="_NaNObject"):
            compile_scene(Scene(objects=[_NaNObject()]))


class TestScenePresets:
    """Tests for the ready-made scenes."""

    def test_sierpinski_scene(self):
        """Test the default Sierpinski scene."""
        from src.raymarcher.geometry.sdf import Sierpinski
        from src.raymarcher.scene.presets import create_sierpinski_scene

        scene, camera = create_sierpinski_scene()
        assert len(scene) == 1
        assert isinstance(scene.objects[0], Sierpinski)
        assert scene.objects[0].get_color() == (200, 0, 0)
        assert camera.center == (0.0, 0.0, 3.0)
        assert camera.viewport_width == pytest.approx(2.0 * 16.0 / 9.0)

    def test_exclusion_scene(self):
        """Test the exclusion scene layout."""
        from src.raymarcher.geometry.sdf import ExclusionObject
        from src.raymarcher.scene.presets import create_exclusion_scene

        scene, camera = create_exclusion_scene()
        obj = scene.objects[0]
        assert isinstance(obj, ExclusionObject)
        assert obj.a.center == (0.0, 0.0, -5.0)
        assert obj.b.center == (0.0, 1.5, -4.0)
        assert camera.center == (0.0, 0.0, 0.0)

    def test_params_override_camera_and_colors(self):
        """Test preset parameters."""
        from src.raymarcher.scene.presets import ScenePresetParams, create_scene

        params = ScenePresetParams(
            object_color=(0, 255, 0),
            background_color=(10, 10, 10),
            aspect_ratio=1.0,
            camera_center=(0.0, 0.0, 1.0),
        )
        scene, camera = create_scene("sphere", params)

        assert scene.objects[0].get_color() == (0, 255, 0)
        assert scene.background_color == (10, 10, 10)
        assert camera.center == (0.0, 0.0, 1.0)
        assert camera.viewport_width == pytest.approx(camera.viewport_height)

    def test_unknown_preset_raises(self):
        """Test that unknown names are rejected."""
        from src.raymarcher.scene.presets import create_scene

        with pytest.raises(ValueError, match="Unknown scene preset"):
            create_scene("teapot")
