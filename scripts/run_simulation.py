import os
import sys
import hydra
from omegaconf import DictConfig

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from signalsim.main import run_headless

@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    """
    Headless run, e.g.:
        python scripts/run_simulation.py run.duration_seconds=120 simulation.seed=7
    """
    run_headless(cfg)

if __name__ == "__main__":
    main()
