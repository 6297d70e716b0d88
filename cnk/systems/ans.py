"""Range Asymmetric Numeral Systems (rANS) engine.

A symbol-agnostic entropy coder. The caller describes each symbol as an
interval ``[start, start + freq)`` of ``2**precision_bits`` and the engine
maps it onto a single integer state, spilling fixed-width words to a stack
when the state would leave its normalized interval ``[L, H)``:

    L = 2**(state_bits - word_bits)      H = 2**state_bits

Encoding and decoding are LIFO: the decoder replays symbols in the reverse
of the order they were encoded, and pops words in the reverse of the order
they were pushed.

A symbol whose frequency is the full total leaves the state untouched, so
certain events cost nothing and may be encoded or skipped interchangeably.

Serialized form (``AnsEncoder.to_bytes``):
  [final state : state_bits / word_bits words, most significant first]
  [word stack  : words in the order the decoder pops them]
"""

from __future__ import annotations

from cnk.core.config import DEFAULT_CONFIG, EngineConfig
from cnk.core.errors import CorruptStream
from cnk.core.serialization import pack_words, unpack_words


class AnsEncoder:
    """Encode symbols onto a rANS state.

    Attributes:
        config: Engine precision constants
        state: Current coder state, always in [L, H)
        words: Word stack in push order

    Example:
        >>> encoder = AnsEncoder()
        >>> encoder.encode(0, 1 << 23)  # a fair coin landing on "0"
        >>> data = encoder.to_bytes()
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self.state = config.state_lower
        self.words: list[int] = []
        self._shift = config.state_bits - config.precision_bits

    def encode(self, start: int, freq: int) -> None:
        """Encode the symbol occupying ``[start, start + freq)``.

        Args:
            start: Cumulative frequency below the symbol
            freq: Frequency of the symbol out of 2**precision_bits

        Raises:
            ValueError: If the interval is empty or leaves [0, total)
        """
        total = self.config.total
        if freq <= 0 or start < 0 or start + freq > total:
            raise ValueError(
                f"Invalid symbol interval [{start}, {start + freq}) "
                f"for total {total}"
            )
        state = self.state
        if state >= freq << self._shift:
            self.words.append(state & self.config.word_mask)
            state >>= self.config.word_bits
        self.state = ((state // freq) << self.config.precision_bits) + state % freq + start

    def flush(self) -> tuple[int, list[int]]:
        """Return the final state and the word stack in decoder read order."""
        return self.state, self.words[::-1]

    def to_bytes(self) -> bytes:
        """Serialize the final state followed by the word stack."""
        state, words = self.flush()
        state_words = [
            (state >> (self.config.word_bits * i)) & self.config.word_mask
            for i in reversed(range(self.config.state_words))
        ]
        return pack_words(state_words + words, self.config.word_bits)


class AnsDecoder:
    """Decode symbols from a rANS state.

    Decoding a symbol is two calls: ``peek`` returns the position inside
    ``[0, total)`` that identifies the symbol, and ``advance`` consumes the
    symbol's interval once the caller has mapped that position back to it
    with the same quantized probabilities used to encode.

    Attributes:
        config: Engine precision constants
        state: Current coder state
    """

    def __init__(
        self,
        state: int,
        words: list[int],
        config: EngineConfig = DEFAULT_CONFIG,
    ) -> None:
        """Initialize decoder from a flushed encoder.

        Args:
            state: Final encoder state
            words: Word stack in read order
            config: Engine precision constants (must match the encoder's)

        Raises:
            CorruptStream: If state is outside [L, H)
        """
        self.config = config
        if not config.state_lower <= state < config.state_upper:
            raise CorruptStream(
                f"Initial state {state:#x} outside "
                f"[{config.state_lower:#x}, {config.state_upper:#x})"
            )
        self.state = state
        self._words = words
        self._pos = 0
        self._mask = config.total - 1

    @classmethod
    def from_bytes(cls, data: bytes, config: EngineConfig = DEFAULT_CONFIG) -> AnsDecoder:
        """Build a decoder from ``AnsEncoder.to_bytes`` output.

        Raises:
            CorruptStream: If data is not whole words or holds no full state
        """
        words = unpack_words(data, config.word_bits)
        if len(words) < config.state_words:
            raise CorruptStream(
                f"Need {config.state_words} words for the coder state, got {len(words)}"
            )
        state = 0
        for word in words[: config.state_words]:
            state = (state << config.word_bits) | word
        return cls(state, words[config.state_words :], config)

    @property
    def remaining_words(self) -> int:
        return len(self._words) - self._pos

    def peek(self) -> int:
        """Interval position of the next symbol, in [0, total)."""
        return self.state & self._mask

    def advance(self, start: int, freq: int) -> None:
        """Consume the symbol occupying ``[start, start + freq)``.

        Raises:
            CorruptStream: If the position from ``peek`` is outside the
                interval, the word stack is exhausted, or the state leaves
                [L, H)
        """
        cf = self.state & self._mask
        if not start <= cf < start + freq:
            raise CorruptStream(
                f"Position {cf} outside symbol interval [{start}, {start + freq})"
            )
        state = freq * (self.state >> self.config.precision_bits) + cf - start
        if state < self.config.state_lower:
            if self._pos >= len(self._words):
                raise CorruptStream("Word stream exhausted before decoding finished")
            state = (state << self.config.word_bits) | self._words[self._pos]
            self._pos += 1
        if not self.config.state_lower <= state < self.config.state_upper:
            raise CorruptStream(f"State {state:#x} left the normalized interval")
        self.state = state

    def check_drained(self) -> None:
        """Verify the decoder is back at the encoder's initial state.

        Raises:
            CorruptStream: If words remain unread or the state is not L
        """
        if self._pos != len(self._words):
            raise CorruptStream(
                f"{len(self._words) - self._pos} unread words after decoding"
            )
        if self.state != self.config.state_lower:
            raise CorruptStream(
                f"Final decoder state {self.state:#x} does not match the initial "
                f"state {self.config.state_lower:#x}"
            )
