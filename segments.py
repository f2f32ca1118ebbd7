"""
Compiles the segments of the counter example, and executes each of them as a challenger would.

Usage:
    python segments.py --steps 8 --cheat-at 5
"""

import argparse
import logging

from dotenv import load_dotenv

from chunker import DummyAssigner, ProtocolConfig, SegmentOutcome, execute_segment
from chunker.graph import SegmentGraph
from chunker.utils import format_witness

from examples.counter.counter_segments import counter_chain, counter_values, final_check, hinted_counter_chain

logging.basicConfig(filename='chunker-cli.log', level=logging.DEBUG)

load_dotenv()


def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)

    parser.add_argument("--start", type=int, default=0, help="Initial value of the computation")
    parser.add_argument("--step", type=int, default=1, help="Increment of each step")
    parser.add_argument("--steps", type=int, default=8, help="Number of steps")
    parser.add_argument("--cheat-at", type=int, default=None, help="Index of the first value the operator lies about")
    parser.add_argument("--hinted", action="store_true", help="Provide the step as a hint")
    parser.add_argument("--dump", action="store_true", help="Print the script and the witness of each segment")

    args = parser.parse_args()

    assigner = DummyAssigner(ProtocolConfig.from_env())

    values = counter_values(assigner, args.start, args.steps, args.step, args.cheat_at)
    chain = hinted_counter_chain(values, args.step) if args.hinted else counter_chain(values, args.step)
    segments = chain + [final_check(values[-1], args.start + args.steps * args.step)]

    graph = SegmentGraph(segments, inputs=["x_0"])
    graph.validate(assigner)

    n_faults = 0
    for i in graph.topological_order():
        segment = segments[i]
        script = segment.script(assigner)
        witness = segment.witness(assigner)
        outcome, res = execute_segment(segment, assigner, witness)

        print(f"{segment.name:>16}: {outcome.name:<9} script: {len(script)} bytes, witness: {len(witness)} elements")
        if args.dump:
            print(f"  script: {script.hex()}")
            print(format_witness(witness, title=f"  {segment.name}"))

        if outcome == SegmentOutcome.FAULT:
            n_faults += 1
        elif outcome == SegmentOutcome.ABORTED:
            logging.error("Segment %s aborted: %s", segment.name, res.error)

    print(f"{n_faults} segment(s) can be used to slash the operator")


if __name__ == "__main__":
    main()
