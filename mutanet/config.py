class Config:

    # =====================
    # Logging
    # =====================
    # Mutation no-ops and gating conflicts log at WARNING when set, DEBUG otherwise
    warnings = False

    # =====================
    # Initialisation
    # =====================
    weight_init_range = 0.1
    bias_init_range = 0.1

    # =====================
    # Mutation
    # =====================
    mod_weight_min = -1.0
    mod_weight_max = 1.0
    mod_bias_min = -1.0
    mod_bias_max = 1.0

    # MOD_ACTIVATION and SWAP_NODES may touch output nodes
    mutate_output = True

    # SUB_NODE re-gates bypass connections with the removed node's gaters
    keep_gates = True

    # None allows every Activation member
    allowed_activations = None

    # =====================
    # Training
    # =====================
    # Multiply the output error by the squash derivative (plain MSE gradient).
    # Leave off to reach an AND/XOR error of 0.002 within 1000/2000 iterations
    scale_output_error = False

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown config option: {key}")
            setattr(self, key, value)
