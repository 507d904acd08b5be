# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
Define the Kron photometry bit flags and tools to decode them.
"""

from dataclasses import dataclass
from typing import ClassVar

import numpy as np

__all__ = ['KRON_FLAGS', 'decode_kron_flags']


@dataclass(frozen=True)
class _KronFlagDefinition:
    """
    A single Kron flag definition.

    Attributes
    ----------
    bit_value : int
        The bit value (power of 2) for this flag.

    name : str
        Short name for the flag (used in decode_kron_flags).

    description : str
        Brief description of what this flag indicates.
    """

    bit_value: int
    name: str
    description: str


class _KronFlags:
    """
    Registry of the Kron photometry flags.

    Each flag has a bit value, a name and a short description. The
    flags are also available as uppercase integer constants.

    Examples
    --------
    >>> from kronphot.kron.flags import _KronFlags
    >>> flags = _KronFlags()
    >>> flags.EDGE
    2
    >>> flags.get_definition('used_minimum_radius').bit_value
    16
    >>> flags.flag_dict[64]
    'bad_shape'
    """

    FLAG_DEFINITIONS: ClassVar = (
        _KronFlagDefinition(1, 'failure', 'general failure'),
        _KronFlagDefinition(2, 'edge', 'aperture off the image edge'),
        _KronFlagDefinition(4, 'bad_radius', 'bad Kron radius'),
        _KronFlagDefinition(8, 'small_radius',
                            'Kron radius increased to the floor'),
        _KronFlagDefinition(16, 'used_minimum_radius',
                            'fallback to the minimum radius'),
        _KronFlagDefinition(32, 'used_psf_radius',
                            'fallback to the PSF Kron radius'),
        _KronFlagDefinition(64, 'bad_shape', 'bad input shape'),
    )

    def __init__(self):
        for flag_def in self.FLAG_DEFINITIONS:
            # uppercase constants (e.g., EDGE = 2)
            setattr(self, flag_def.name.upper(), flag_def.bit_value)

        self._bit_to_def = {fd.bit_value: fd for fd in self.FLAG_DEFINITIONS}
        self._name_to_def = {fd.name: fd for fd in self.FLAG_DEFINITIONS}

    @property
    def flag_dict(self):
        """
        Return dictionary mapping bit values to names.
        """
        return {fd.bit_value: fd.name for fd in self.FLAG_DEFINITIONS}

    def get_definition(self, identifier):
        """
        Get flag definition by bit value or name.

        Parameters
        ----------
        identifier : int or str
            Either the bit value (int) or name (str) of the flag.

        Returns
        -------
        definition : `_KronFlagDefinition`
            The flag definition.

        Raises
        ------
        KeyError
            If the identifier is not found.
        """
        if isinstance(identifier, (int, np.integer)):
            if identifier not in self._bit_to_def:
                msg = f'No flag with bit value {identifier}'
                raise KeyError(msg)
            return self._bit_to_def[identifier]

        if isinstance(identifier, str):
            if identifier not in self._name_to_def:
                msg = f"No flag with name '{identifier}'"
                raise KeyError(msg)
            return self._name_to_def[identifier]

        msg = 'identifier must be int (bit value) or str (name)'
        raise TypeError(msg)


KRON_FLAGS = _KronFlags()


def _update_decode_docstring(func):
    """
    Decorator to insert the Kron flag names into a docstring in place
    of the ``<flag descriptions>`` placeholder.
    """
    if func.__doc__ is None:
        return func

    placeholder = '<flag descriptions>'
    if placeholder in func.__doc__:
        indent = ' ' * 8
        lines = ['']
        for flag_def in KRON_FLAGS.FLAG_DEFINITIONS:
            lines.append(f"{indent}- ``'{flag_def.name}'`` : bit "
                         f'{flag_def.bit_value}, {flag_def.description}')
        func.__doc__ = func.__doc__.replace(placeholder, '\n'.join(lines))

    return func


@_update_decode_docstring
def decode_kron_flags(flags):
    # numpydoc ignore: RT05
    """
    Decode Kron photometry bit flags into flag names.

    Parameters
    ----------
    flags : int or array-like of int
        Integer flag value(s) to decode.

    Returns
    -------
    decoded : list of str or list of list of str
        List of active flag names, or list of lists if input is an
        array. If no flags are set, an empty list is returned. Possible
        flag names are:
        <flag descriptions>

    Examples
    --------
    >>> from kronphot.kron import decode_kron_flags
    >>> decode_kron_flags(3)
    ['failure', 'edge']
    >>> decode_kron_flags([0, 8, 21])
    [[], ['small_radius'], ['failure', 'bad_radius', 'used_minimum_radius']]
    """
    flag_definitions = KRON_FLAGS.flag_dict

    def _decode_single_flag(flag_value):
        if not isinstance(flag_value, (int, np.integer)):
            msg = 'Flag value must be an integer'
            raise TypeError(msg)

        if flag_value < 0:
            msg = 'Flag value must be a non-negative integer'
            raise ValueError(msg)

        return [name for bit_value, name in flag_definitions.items()
                if flag_value & bit_value]

    if np.isscalar(flags):
        return _decode_single_flag(flags)

    flags_array = np.asarray(flags)
    if flags_array.ndim == 0:
        return _decode_single_flag(flags_array.item())

    return [_decode_single_flag(flag) for flag in flags_array.flat]
