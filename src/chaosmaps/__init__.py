from .schema import (
	DISPLAY_NAMES,
	STABLE_RANGES,
	MapType,
	ParameterRange,
	get_default_parameters,
	get_stable_ranges,
	is_parameters_of_type,
	is_valid_map_type,
)
from .validation import (
	StabilityResult,
	ValidationResult,
	check_parameter_stability,
	validate_parameters,
)
from .loaders import (
	CancellationToken,
	LoadCancelled,
	LoadFailure,
	LoadSuccess,
	load_saved_config_parameters,
	load_shared_config_parameters,
	parse_config_param,
)
from .config_loader import ConfigLoader, ConfigLoaderState, config_source_key
from .comparison import (
	ComparisonState,
	build_comparison_url,
	create_comparison_state_from_current,
	decode_comparison_state,
	encode_comparison_state,
	swap_parameters,
)
from .kernels import KERNEL_REGISTRY, calculate_rossler, run_kernel
from .compute import ComputeDelegate, handle_worker_message

__all__ = [
	"DISPLAY_NAMES",
	"STABLE_RANGES",
	"MapType",
	"ParameterRange",
	"get_default_parameters",
	"get_stable_ranges",
	"is_parameters_of_type",
	"is_valid_map_type",
	"StabilityResult",
	"ValidationResult",
	"check_parameter_stability",
	"validate_parameters",
	"CancellationToken",
	"LoadCancelled",
	"LoadFailure",
	"LoadSuccess",
	"load_saved_config_parameters",
	"load_shared_config_parameters",
	"parse_config_param",
	"ConfigLoader",
	"ConfigLoaderState",
	"config_source_key",
	"ComparisonState",
	"build_comparison_url",
	"create_comparison_state_from_current",
	"decode_comparison_state",
	"encode_comparison_state",
	"swap_parameters",
	"KERNEL_REGISTRY",
	"calculate_rossler",
	"run_kernel",
	"ComputeDelegate",
	"handle_worker_message",
]
