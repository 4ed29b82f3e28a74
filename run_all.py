"""
Run the ganglion cell spiking output on a synthetic stimulus.

Usage:
  python run_all.py                                  # 20x20 grating, 1 s
  python run_all.py --stimulus constant --value 5    # constant input
  python run_all.py --param Spike_std_dev=-1         # Poisson-like output
  python run_all.py --param Start_time=200 --param End_time=800
  python run_all.py --plot                           # save a raster figure
"""

import sys
import os
import argparse
import logging
import time

import numpy as np

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from circuit import config
from circuit.spiking_output import SpikingOutput
from models.stimulus import constant_frames, step_frames, grating_frames, flicker_frames
from analysis.spike_analysis import isi_statistics, population_rate


def parse_param(text):
    """'Name=value' -> (name, float value)."""
    name, sep, value = text.partition('=')
    if not sep:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    try:
        return name.strip(), float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"value of {name} is not a number: {value!r}")


def make_frames(args, rng):
    shape = (args.height, args.width)
    if args.stimulus == 'constant':
        return constant_frames(shape, args.value, args.duration, args.step)
    if args.stimulus == 'step':
        return step_frames(shape, 0.0, args.value, args.duration / 2.0,
                           args.duration, args.step)
    if args.stimulus == 'flicker':
        return flicker_frames(shape, args.duration, args.step, mean=args.value,
                              std=args.value / 2.0, rng=rng)
    return grating_frames(shape, args.duration, args.step, mean=args.value)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Retina ganglion cell spiking output')
    parser.add_argument('--width', type=int, default=20, help='Grid width (pixels)')
    parser.add_argument('--height', type=int, default=20, help='Grid height (pixels)')
    parser.add_argument('--duration', type=float, default=1000.0,
                        help='Simulated time (ms)')
    parser.add_argument('--step', type=float, default=config.DEFAULT_STEP_MS,
                        help='Slot length (ms)')
    parser.add_argument('--stimulus', choices=['grating', 'constant', 'step', 'flicker'],
                        default='grating')
    parser.add_argument('--value', type=float, default=20.0,
                        help='Stimulus mean / amplitude (input units)')
    parser.add_argument('--param', type=parse_param, action='append', default=[],
                        metavar='NAME=VALUE',
                        help='Spiking output parameter, e.g. Min_period=2 (repeatable)')
    parser.add_argument('--random-init', type=float, default=config.RANDOM_INIT,
                        help='Randomize initial firing phases (0 = off)')
    parser.add_argument('--seed', type=int, default=42, help='Random seed')
    parser.add_argument('--output', default=config.DEFAULT_SPIKE_FILE,
                        help='Output spike file')
    parser.add_argument('--plot', action='store_true', help='Save a raster plot')
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    engine = SpikingOutput(args.width, args.height, step_ms=args.step,
                           output_filename=args.output,
                           random_init=args.random_init, seed=args.seed)
    result = engine.set_parameters(args.param)
    if not result:
        print(f"Invalid parameters: {result.failure_reason}")
        return 2
    # Random_init given as a parameter only applies after reallocation
    engine.allocate_values()

    rng = np.random.default_rng(args.seed + 1)
    start_time = time.time()
    engine.run(make_frames(args, rng))
    elapsed = time.time() - start_time

    duration_s = args.duration / 1000.0
    print("=" * 60)
    print("SPIKING OUTPUT SUMMARY")
    print("=" * 60)
    print(f"  Neurons: {engine.n_neurons}  Slots: {int(round(args.duration / args.step))}")
    print(f"  Spikes: {len(engine.events)}")
    print(f"  Mean rate: {population_rate(engine.events, engine.n_neurons, duration_s):.2f} Hz")
    trains = engine.events.per_neuron()
    if trains:
        busiest = max(trains, key=lambda n: len(trains[n]))
        st = isi_statistics(trains[busiest])
        print(f"  Neuron {busiest}: {len(trains[busiest])} spikes, "
              f"ISI mean {st['mean'] * 1000.0:.2f} ms, CV {st['cv']:.3f}")
    print(f"  Internal errors: {engine.diagnostics.count}")
    print(f"  Runtime: {elapsed:.1f} s")

    if args.plot:
        import matplotlib
        matplotlib.use('Agg')
        from analysis.plotting import plot_spike_raster
        plot_spike_raster(engine.events, title=f'{args.stimulus} stimulus',
                          save_name=f'raster_{args.stimulus}.png')
        print("  Raster saved to figures/")

    result = engine.close()
    if not result:
        print(f"Could not save spikes: {result.failure_reason}")
        return 1
    print(f"Spikes saved to {args.output}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
