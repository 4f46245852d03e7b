"""
Turnstile: GPU admission gate.

Waits until enough GPUs are idle, claims them against every other
turnstile instance on the host, then runs the given command on them.

Usage:
    # One GPU, exposed through CUDA_VISIBLE_DEVICES
    python gate.py python train.py

    # Two GPUs, ids substituted into the command instead
    python gate.py -n 2 python train.py --devices {}

    # Layer flags over a YAML file
    python gate.py --config waiter.yaml -- ./run.sh
"""

from turnstile.__main__ import main

if __name__ == "__main__":
    main()
