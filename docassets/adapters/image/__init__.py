from .pillow_optimizer import PillowImageOptimizer, can_encode, encode_image

__all__ = ["PillowImageOptimizer", "can_encode", "encode_image"]
