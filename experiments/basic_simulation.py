"""
Basic simulation experiment for a Chrest model.

Trains a model by scanning randomly generated board scenes, then:
- Reports how the discrimination network grew
- Recalls an unseen scene from STM and scores the recall
- Builds a visual-spatial field of the scene and moves an object in it
- Shows the field decaying over time

Model parameters can be overridden with CHREST_* environment variables or a
.env file next to the repository root.
"""

import numpy as np
import time
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from chrest import Chrest, ChrestConfig, Scene
from chrest.patterns import Modality
from chrest.utils import compute_ltm_metrics


def random_scene(name: str, width: int, height: int, num_objects: int,
                 object_classes, rng: np.random.RandomState) -> Scene:
    """
    Scene of empty squares with objects of random classes on random squares.

    Args:
        name: Scene name
        width: Number of columns
        height: Number of rows
        num_objects: Objects to place (capped at the number of squares)
        object_classes: Classes to draw from
        rng: Random source

    Returns:
        Scene: The generated scene
    """
    scene = Scene(name, width, height)
    for col in range(width):
        for row in range(height):
            scene.add_empty_square(col, row)

    squares = rng.permutation(width * height)[:min(num_objects, width * height)]
    for i, square in enumerate(squares):
        object_class = object_classes[rng.randint(len(object_classes))]
        scene.add_object(int(square % width), int(square // width), f"{object_class.lower()}{i}", object_class)
    return scene


def run_basic_simulation(num_scenes: int = 50,
                         width: int = 8,
                         height: int = 8,
                         num_objects: int = 12,
                         fixations_per_scene: int = 20,
                         random_seed: int = 42,
                         verbose: bool = True):
    """
    Run basic simulation experiment.

    Args:
        num_scenes: Number of training scenes
        width: Scene width
        height: Scene height
        num_objects: Objects per scene
        fixations_per_scene: Fixation budget per scan
        random_seed: Random seed for reproducibility
        verbose: Whether to print progress

    Returns:
        dict: Simulation results including the model and metrics
    """
    config = ChrestConfig.from_env(dotenv_path=Path(__file__).parent.parent / '.env')
    config = config.with_overrides(random_seed=random_seed)
    rng = np.random.RandomState(random_seed)
    object_classes = ['P', 'N', 'B', 'R', 'Q', 'K']

    if verbose:
        print("="*70)
        print("CHREST - Basic Simulation")
        print("="*70)
        print(f"Configuration:")
        print(f"  Training scenes: {num_scenes}")
        print(f"  Scene size: {width}x{height}, {num_objects} objects")
        print(f"  Fixations per scene: {fixations_per_scene}")
        print(f"  Discrimination/familiarisation time: "
              f"{config.discrimination_time}/{config.familiarisation_time} ms")
        print(f"  Random seed: {random_seed}")
        print("="*70)

    # Training
    if verbose:
        print(f"\n[1/3] Training on {num_scenes} scenes...")

    start_time = time.time()
    model = Chrest(config)
    sim_time = 0
    history = []

    for i in range(num_scenes):
        scene = random_scene(f"train-{i}", width, height, num_objects, object_classes, rng)
        model.scan_scene(scene, fixations_per_scene, sim_time)
        sim_time = model.maximum_clock + 1000
        history.append(model.ltm_size)

        if verbose and (i + 1) % 10 == 0:
            print(f"  Scene {i + 1:4d}: LTM size = {model.ltm_size}")

    training_time = time.time() - start_time
    metrics = compute_ltm_metrics(model.get_ltm(Modality.VISUAL))

    if verbose:
        print(f"  ✓ Training complete in {training_time:.2f}s")
        print(f"  Visual LTM: {metrics['size']} nodes, max depth {metrics['max_depth']}, "
              f"mean image size {metrics['average_image_size']:.2f}")

    # Recall
    if verbose:
        print("\n[2/3] Recalling an unseen scene...")

    test_scene = random_scene("test", width, height, num_objects, object_classes, rng)
    recalled = model.scan_scene(test_scene, fixations_per_scene, sim_time)
    recall_scores = {
        'precision': recalled.precision(test_scene),
        'recall': recalled.recall(test_scene),
        'omission': recalled.errors_of_omission(test_scene),
        'commission': recalled.errors_of_commission(test_scene),
    }

    if verbose:
        print(f"  Precision: {recall_scores['precision']:.3f}")
        print(f"  Recall: {recall_scores['recall']:.3f}")
        print(f"  Errors of omission: {recall_scores['omission']}")

    # Visual-spatial field
    if verbose:
        print("\n[3/3] Building a visual-spatial field...")

    field_time = model.maximum_clock + 1000
    field = model.create_visual_spatial_field(
        test_scene,
        object_encoding_time=50,
        empty_square_encoding_time=10,
        access_time=100,
        object_movement_time=250,
        recognised_object_lifespan=10000,
        unrecognised_object_lifespan=5000,
        number_fixations=fixations_per_scene,
        time=field_time,
    )
    encoded_at = model.attention_clock

    col, row, obj = test_scene.objects()[0]
    target = (col + 1) % width
    moved_at = model.move_objects_in_visual_spatial_field(
        [[(obj.identifier, col, row), (obj.identifier, target, row)]], encoded_at)

    snapshots = {t: field.get_as_scene(t) for t in (encoded_at, moved_at, moved_at + 20000)}
    known = {t: sum(1 for _, _, o in scene.squares() if o.is_concrete)
             for t, scene in snapshots.items()}

    if verbose:
        print(f"  Field built from {field_time} to {encoded_at}")
        print(f"  Moved {obj.identifier} from ({col}, {row}) to ({target}, {row}), done at {moved_at}")
        for t, count in known.items():
            print(f"  Objects remembered at {t}: {count}")

    total_time = time.time() - start_time

    if verbose:
        print("\n" + "="*70)
        print("SIMULATION COMPLETE")
        print("="*70)
        print(f"Total time: {total_time:.2f}s")
        print("="*70)

    return {
        'config': config,
        'model': model,
        'ltm_size_history': history,
        'ltm_metrics': metrics,
        'recall_scores': recall_scores,
        'field': field,
        'remembered_objects': known,
        'timing': {'total': total_time, 'training': training_time},
    }


def quick_test(verbose: bool = True):
    """
    Quick test with smaller parameters for rapid validation.

    Args:
        verbose: Whether to print output

    Returns:
        dict: Results
    """
    if verbose:
        print("\n🔬 Running quick test (10 scenes, 5x5)...\n")

    return run_basic_simulation(
        num_scenes=10,
        width=5,
        height=5,
        num_objects=6,
        fixations_per_scene=10,
        random_seed=42,
        verbose=verbose
    )


def main():
    """Main entry point for basic simulation."""
    import argparse

    parser = argparse.ArgumentParser(
        description='Run Chrest basic simulation'
    )
    parser.add_argument('--scenes', '-n', type=int, default=50,
                        help='Number of training scenes (default: 50)')
    parser.add_argument('--width', type=int, default=8,
                        help='Scene width (default: 8)')
    parser.add_argument('--height', type=int, default=8,
                        help='Scene height (default: 8)')
    parser.add_argument('--objects', '-o', type=int, default=12,
                        help='Objects per scene (default: 12)')
    parser.add_argument('--fixations', '-f', type=int, default=20,
                        help='Fixations per scene (default: 20)')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed (default: 42)')
    parser.add_argument('--plot', action='store_true',
                        help='Show the network and the field over time')

    parser.add_argument('--quick-test', action='store_true',
                        help='Run quick test with small parameters')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Suppress output')

    args = parser.parse_args()

    if args.quick_test:
        results = quick_test(verbose=not args.quiet)
    else:
        results = run_basic_simulation(
            num_scenes=args.scenes,
            width=args.width,
            height=args.height,
            num_objects=args.objects,
            fixations_per_scene=args.fixations,
            random_seed=args.seed,
            verbose=not args.quiet
        )

    if args.plot:
        import matplotlib.pyplot as plt
        from visualization import plot_discrimination_network, plot_field_evolution

        plot_discrimination_network(results['model'])
        plot_field_evolution(results['field'], sorted(results['remembered_objects']))
        plt.show()

    return results


if __name__ == '__main__':
    main()
