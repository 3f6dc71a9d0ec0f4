from setuptools import setup, find_packages

setup(
    name='attkinpy',
    version='0.1.0',
    packages=find_packages(include=['attkinpy', 'attkinpy.*']),
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    python_requires='>=3.8',
    install_requires=[
        'numpy',
        'pydantic>=2',
        'omegaconf',
        'scipy',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
)
